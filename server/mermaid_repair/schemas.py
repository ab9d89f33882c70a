from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional, Union


# ===================================================================
# AI payload schema
# ===================================================================

class GeneratedDiagramPayload(BaseModel):
    """
    JSON object returned by the diagram-generation model

    Only ``mermaid`` is required; the model sometimes omits the rest.
    """
    title: Optional[str] = None
    domain: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    mermaid: str
    summary: Optional[str] = None
    notes_md: Optional[str] = None


# ===================================================================
# Dedicated schemas for API requests/responses
# ===================================================================

class SanitizeRequest(BaseModel):
    """Request schema for sanitizing one diagram source"""
    source: str


class SanitizeResponse(BaseModel):
    status: str  # "unchanged" or "fixed"
    source: str
    changed: bool
    rules_applied: List[str] = []


class CleanResponse(BaseModel):
    """Security filter followed by syntax repair"""
    source: str
    security_stripped: bool
    syntax_fixed: bool
    rules_applied: List[str] = []


class RenderErrorRequest(BaseModel):
    """
    Sent by the client when the Mermaid renderer fails on stored source

    error_message carries the renderer's reported location/message.
    """
    source: str
    error_message: str = ""
    summary: str = ""


class RenderErrorResponse(BaseModel):
    action: str  # "auto_fixed" or "escalate"
    source: str
    fix_prompt: Optional[str] = None


class PrepareDiagramRequest(BaseModel):
    """Raw model output, either the JSON text or the already parsed object"""
    payload: Union[str, Dict[str, Any]]


class PreparedDiagramResponse(BaseModel):
    title: Optional[str] = None
    slug: str
    tags: List[str] = []
    diagram_source: str
    summary: Optional[str] = None
    notes_md: Optional[str] = None
    syntax_fixed: bool
    security_stripped: bool
