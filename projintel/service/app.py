"""FastAPI application entrypoint for projintel service mode."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, List, Optional, TypeVar

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ..config import ConfigError
from ..engine import ProjectEngine
from ..errors import EngineError, EnhancerError, FileAccessError, PathError, SizeError
from ..models import DocHeader, HealthInputs

T = TypeVar("T")

ERROR_STATUS = {
    PathError: 404,
    SizeError: 413,
    FileAccessError: 500,
    ConfigError: 400,
    EnhancerError: 502,
}


class RootRequest(BaseModel):
    path: str


class ScanRequest(RootRequest):
    header_stamps: Dict[str, float] = Field(default_factory=dict)


class FileRequest(BaseModel):
    path: str


class HeaderModel(BaseModel):
    module_path: str = ""
    description: str = ""
    purpose: List[str] = Field(default_factory=list)
    dependencies: List[str] = Field(default_factory=list)
    exports: List[str] = Field(default_factory=list)
    patterns: List[str] = Field(default_factory=list)
    claude_notes: List[str] = Field(default_factory=list)

    def to_doc(self) -> DocHeader:
        return DocHeader(
            module_path=self.module_path,
            description=self.description,
            purpose=list(self.purpose),
            dependencies=list(self.dependencies),
            exports=list(self.exports),
            patterns=list(self.patterns),
            claude_notes=list(self.claude_notes),
        )


class FormatRequest(BaseModel):
    doc: HeaderModel
    language: str


class FormatResponse(BaseModel):
    header: str


class ApplyRequest(BaseModel):
    path: str
    doc: HeaderModel


class GenerateRequest(BaseModel):
    path: str
    root: str


class BatchRequest(BaseModel):
    paths: List[str]
    root: str


class HealthRequest(RootRequest):
    claude_md: Optional[int] = None
    module_docs: Optional[int] = None
    freshness: Optional[int] = None
    skills: int = 0
    context: int = 0
    enforcement: int = 0

    def to_inputs(self) -> HealthInputs:
        return HealthInputs(
            claude_md=self.claude_md,
            module_docs=self.module_docs,
            freshness=self.freshness,
            skills=self.skills,
            context=self.context,
            enforcement=self.enforcement,
        )


class StatusResponse(BaseModel):
    status: str


def _default_engine() -> ProjectEngine:
    return ProjectEngine()


async def _run(func: Callable[[], T]) -> T:
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:  # pragma: no cover - fallback path when not in async context
        return func()
    return await loop.run_in_executor(None, func)


def _status_for(exc: EngineError) -> int:
    for error_type, status in ERROR_STATUS.items():
        if isinstance(exc, error_type):
            return status
    return 500


def create_app(engine_factory: Callable[[], ProjectEngine] = _default_engine) -> FastAPI:
    """Create the FastAPI application exposing the engine entry points."""

    app = FastAPI(title="Project Intelligence Service", version="1.0.0")

    async def get_engine() -> ProjectEngine:
        return engine_factory()

    @app.get("/health", response_model=StatusResponse)
    async def health() -> StatusResponse:
        return StatusResponse(status="ok")

    @app.post("/detect")
    async def detect(payload: RootRequest, engine: ProjectEngine = Depends(get_engine)) -> Any:
        result = await _run(lambda: engine.detect_stack(payload.path))
        return result.to_dict()

    @app.post("/scan")
    async def scan(payload: ScanRequest, engine: ProjectEngine = Depends(get_engine)) -> Any:
        statuses = await _run(
            lambda: engine.scan_modules(payload.path, header_stamps=payload.header_stamps)
        )
        return [status.to_dict() for status in statuses]

    @app.post("/header/read")
    async def read_header(payload: FileRequest, engine: ProjectEngine = Depends(get_engine)) -> Any:
        doc = await _run(lambda: engine.read_header(payload.path))
        return doc.to_dict() if doc is not None else None

    @app.post("/header/format", response_model=FormatResponse)
    async def format_header(
        payload: FormatRequest, engine: ProjectEngine = Depends(get_engine)
    ) -> FormatResponse:
        return FormatResponse(header=engine.format_header(payload.doc.to_doc(), payload.language))

    @app.post("/header/apply", response_model=StatusResponse)
    async def apply_header(
        payload: ApplyRequest, engine: ProjectEngine = Depends(get_engine)
    ) -> StatusResponse:
        await _run(lambda: engine.apply_header(payload.path, payload.doc.to_doc()))
        return StatusResponse(status="applied")

    @app.post("/header/generate")
    async def generate_header(
        payload: GenerateRequest, engine: ProjectEngine = Depends(get_engine)
    ) -> Any:
        doc = await _run(lambda: engine.generate_header(payload.path, payload.root))
        return doc.to_dict()

    @app.post("/header/batch")
    async def batch_generate(
        payload: BatchRequest, engine: ProjectEngine = Depends(get_engine)
    ) -> Any:
        statuses = await _run(lambda: engine.batch_generate(payload.paths, payload.root))
        return [status.to_dict() for status in statuses]

    @app.post("/project-health")
    async def project_health(
        payload: HealthRequest, engine: ProjectEngine = Depends(get_engine)
    ) -> Any:
        report = await _run(lambda: engine.compute_health(payload.path, payload.to_inputs()))
        return report.to_dict()

    @app.exception_handler(EngineError)
    async def engine_error_handler(_: Any, exc: EngineError) -> JSONResponse:
        return JSONResponse(status_code=_status_for(exc), content={"error": exc.to_dict()})

    return app


def run_service(host: str = "127.0.0.1", port: int = 8000) -> None:  # pragma: no cover - integration path
    import uvicorn

    uvicorn.run(create_app(), host=host, port=port)
