import logging

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

import mermaid_repair.schemas as schemas
from mermaid_repair.internal.mermaid_sanitizer import sanitize
from mermaid_repair.internal.repair_pipeline import (
    DiagramPayloadError,
    clean_diagram_source,
    prepare_generated_diagram,
    recover_render_error,
)
from mermaid_repair.internal.settings import LOG_LEVEL, get_trigger_table

# Configure logging
logging.basicConfig(level=getattr(logging, LOG_LEVEL.upper(), logging.INFO))
logger = logging.getLogger(__name__)

TRIGGERS = get_trigger_table()

app = FastAPI(title="Mermaid Repair")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ===================================================================
# Syntax repair endpoints
# ===================================================================

@app.post("/api/mermaid/sanitize")
def sanitize_diagram(request: schemas.SanitizeRequest) -> schemas.SanitizeResponse:
    """Run the syntax sanitizer only (input is assumed security-filtered)"""
    result = sanitize(request.source, TRIGGERS)
    return schemas.SanitizeResponse(
        status=result.status.value,
        source=result.text,
        changed=result.changed,
        rules_applied=list(result.rules_applied),
    )


@app.post("/api/mermaid/clean")
def clean_diagram(request: schemas.SanitizeRequest) -> schemas.CleanResponse:
    """Security filter followed by syntax repair, used for manual edits"""
    cleaned = clean_diagram_source(request.source, TRIGGERS)
    return schemas.CleanResponse(
        source=cleaned.source,
        security_stripped=cleaned.security_stripped,
        syntax_fixed=cleaned.syntax_fixed,
        rules_applied=list(cleaned.syntax.rules_applied),
    )


@app.post("/api/mermaid/render-error")
def handle_render_error(request: schemas.RenderErrorRequest) -> schemas.RenderErrorResponse:
    """
    Called by the client when the Mermaid renderer fails to parse stored source

    Returns the repaired source, or the fix-syntax prompt to send to the AI
    re-fix service when the sanitizer has nothing to repair.
    """
    outcome = recover_render_error(
        request.source,
        error_message=request.error_message,
        summary=request.summary,
        triggers=TRIGGERS,
    )
    return schemas.RenderErrorResponse(
        action=outcome.action,
        source=outcome.source,
        fix_prompt=outcome.fix_prompt,
    )


# ===================================================================
# Diagram generation hand-off
# ===================================================================

@app.post("/api/diagrams/prepare")
def prepare_diagram(request: schemas.PrepareDiagramRequest) -> schemas.PreparedDiagramResponse:
    """Validate and clean the generation model's JSON payload before it is stored"""
    try:
        prepared = prepare_generated_diagram(request.payload, TRIGGERS)
    except DiagramPayloadError as e:
        logger.warning(f"Rejected diagram payload: {e}")
        raise HTTPException(status_code=422, detail=str(e))

    return schemas.PreparedDiagramResponse(**prepared.to_dict())


logger.info(f"✅ Mermaid repair service ready, node quote triggers: {''.join(sorted(TRIGGERS.node_chars))}")
