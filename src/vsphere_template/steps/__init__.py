# SPDX-FileCopyrightText: 2026 Lasath Fernando <devel@lasath.org>
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Template pipeline: place, snapshot and convert the built VM.

The steps run in this fixed order, each consuming what the previous one
left on the context:

====== ==================== ==========================================
order  step                 leaves on the context
====== ==================== ==========================================
100    choose_datacenter    ``datacenter``
200    create_folder        ``folder``
300    create_snapshot      ``vm`` (when enabled)
400    mark_as_template     ``vm``; artifact flagged as a template
====== ==================== ==========================================

Importing this package registers all steps with the pipeline.
"""

from ..context import TemplateContext
from ..pipeline import Pipeline

template_pipeline = Pipeline[TemplateContext]("template")

# Import step modules so their decorators register with the pipeline.
from . import choose_datacenter as _  # noqa: F401, E402
from . import create_folder as _  # noqa: F401, E402
from . import create_snapshot as _  # noqa: F401, E402
from . import mark_as_template as _  # noqa: F401, E402
