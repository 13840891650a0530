"""Minimal example of litestar-workflow-forms integration.

This example serves the bundled SCEP search workflow with the in-memory
engine. A pending enrollment with transaction id ``ABC123`` is seeded so that
a search has something to find.

Run with:
    cd examples/minimal
    litestar run

Or:
    uvicorn app:app --reload

Then:
    - GET  /workflow/index?wf_type=search_scep - start page
    - POST /workflow/action wf_type=search_scep - create the search
    - POST /workflow/action wf_token=...&transaction_id=ABC123
    - GET  /workflow/load?wf_id=1 - the found enrollment
"""

from __future__ import annotations

import logging

from litestar import Litestar, get

from litestar_workflow_forms import WorkflowFormsConfig, WorkflowFormsPlugin
from litestar_workflow_forms.core import load_packaged_definition
from litestar_workflow_forms.engine import InMemoryEngine

logging.basicConfig(level=logging.INFO)

# =============================================================================
# Engine
# =============================================================================

engine = InMemoryEngine(
    [
        load_packaged_definition("search_scep"),
        load_packaged_definition("enrollment"),
    ],
    role="RA Operator",
    user="operator",
    first_id=100,
)

# A pending enrollment requested through the first SCEP endpoint
engine.add_instance(
    "enrollment",
    context={"transaction_id": "ABC123"},
    state="PENDING",
    instance_id=1,
    creator="scep-server-1",
)


@get("/")
async def index() -> dict[str, str]:
    """List the entry points of the example."""
    return {
        "search": "/workflow/index?wf_type=search_scep",
        "enrollment": "/workflow/load?wf_id=1",
    }


# =============================================================================
# Application
# =============================================================================

app = Litestar(
    route_handlers=[index],
    plugins=[WorkflowFormsPlugin(config=WorkflowFormsConfig(engine=engine))],
    debug=True,
)
