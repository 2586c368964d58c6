"""Marketing copy generation for listings."""

from typing import List

from fastapi import APIRouter
from fastapi.responses import HTMLResponse, Response

from lydian_travel.schemas.content import (
    ContentBatchRequest,
    ContentQuality,
    ContentRequest,
    GeneratedContent,
)
from lydian_travel.services import content_writer

router = APIRouter(prefix="/content", tags=["content"])


@router.post("/generate", response_model=GeneratedContent)
def generate_content(payload: ContentRequest):
    return content_writer.generate_content(payload)


@router.post("/batch", response_model=List[GeneratedContent])
def generate_batch(payload: ContentBatchRequest):
    return content_writer.generate_batch(payload.items)


@router.post("/quality", response_model=ContentQuality)
def score_content(content: GeneratedContent):
    return content_writer.calculate_quality(content)


@router.post("/export")
def export_content(payload: ContentRequest):
    """Generate content and return it as a downloadable JSON document."""

    body = content_writer.export_json(content_writer.generate_content(payload))
    return Response(
        content=body,
        media_type="application/json",
        headers={"Content-Disposition": 'attachment; filename="content.json"'},
    )


@router.post("/preview", response_class=HTMLResponse)
def preview_content(payload: ContentRequest):
    return HTMLResponse(content_writer.render_preview(content_writer.generate_content(payload)))


__all__ = ["router"]
