from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from app.dependencies.services import AdminUser
from app.metrics import PrometheusExporter, metrics_registry

router = APIRouter(prefix="/metrics", tags=["metrics"])


@router.get("", response_class=PlainTextResponse, summary="Prometheus text exposition")
async def export_metrics(_: AdminUser) -> PlainTextResponse:
    exporter = PrometheusExporter(metrics_registry)
    return PlainTextResponse(exporter.build_payload(), media_type=exporter.content_type)
