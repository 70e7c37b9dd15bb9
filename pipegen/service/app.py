"""FastAPI application exposing a pipegen builder session."""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ..builder import WorkflowBuilder
from ..config import PipegenConfig
from ..graph import NodeSpec
from ..models import AnalysisResult, CIProvider, SourceKind


class AnalyzeRequest(BaseModel):
    owner: str
    repo: str
    source: SourceKind = SourceKind.GITHUB


class AnalysisPayload(BaseModel):
    repository: str
    package_manager: str
    framework: str
    has_dockerfile: bool
    has_ci_config: bool

    @classmethod
    def from_result(cls, result: AnalysisResult) -> "AnalysisPayload":
        return cls(
            repository=result.repository,
            package_manager=result.package_manager,
            framework=result.framework,
            has_dockerfile=result.has_dockerfile,
            has_ci_config=result.has_ci_config,
        )


class AnalysisResponse(BaseModel):
    state: str
    is_loading: bool
    error: Optional[str] = None
    analysis: Optional[AnalysisPayload] = None
    can_generate_config: bool


class ProviderRequest(BaseModel):
    provider: CIProvider


class ProviderResponse(BaseModel):
    provider: CIProvider
    choices: List[CIProvider]


class GenerateRequest(BaseModel):
    provider: Optional[CIProvider] = None


class ConfigResponse(BaseModel):
    yaml: str
    loading: bool
    error: Optional[str] = None
    visible: bool
    provider: CIProvider


class NodeRequest(BaseModel):
    category: str
    label: str
    key: Optional[str] = None
    properties: Dict[str, Any] = Field(default_factory=dict)


class NodeResponse(BaseModel):
    key: str


class LinkRequest(BaseModel):
    source: str
    target: str


class SelectionRequest(BaseModel):
    keys: List[str]


class SelectionResponse(BaseModel):
    selection: List[str]


class DeleteResponse(BaseModel):
    removed: int


class GraphResponse(BaseModel):
    nodes: List[Dict[str, Any]]
    links: List[Dict[str, str]]
    selection: List[str]


class HealthResponse(BaseModel):
    status: str


def create_app(
    builder_factory: Callable[[], WorkflowBuilder] = WorkflowBuilder,
) -> FastAPI:
    """Create the FastAPI application around a single builder session."""

    app = FastAPI(title="Pipegen Service", version="1.0.0")
    app.state.builder = builder_factory()

    async def get_builder(request: Request) -> WorkflowBuilder:
        return request.app.state.builder

    def _analysis_response(builder: WorkflowBuilder) -> AnalysisResponse:
        result = builder.analysis.result
        return AnalysisResponse(
            state=builder.analysis.state.value,
            is_loading=builder.analysis.is_loading,
            error=builder.analysis.error,
            analysis=AnalysisPayload.from_result(result) if result is not None else None,
            can_generate_config=builder.can_generate_config(),
        )

    def _config_response(builder: WorkflowBuilder) -> ConfigResponse:
        config = builder.generated_config
        return ConfigResponse(
            yaml=config.yaml,
            loading=config.loading,
            error=config.error,
            visible=builder.generation.config_visible,
            provider=builder.provider.value,
        )

    def _graph_response(builder: WorkflowBuilder) -> GraphResponse:
        workflow = builder.graph.serialize_to_workflow()
        nodes: List[Dict[str, Any]] = []
        links: List[Dict[str, str]] = []
        if workflow is not None:
            nodes = list(workflow.workflow["nodes"])
            links = list(workflow.workflow["links"])
        return GraphResponse(
            nodes=nodes, links=links, selection=sorted(builder.graph.selection)
        )

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/analyze", response_model=AnalysisResponse)
    async def analyze(
        payload: AnalyzeRequest,
        builder: WorkflowBuilder = Depends(get_builder),
    ) -> AnalysisResponse:
        await builder.analyze_repository(payload.owner, payload.repo, payload.source)
        return _analysis_response(builder)

    @app.get("/analysis", response_model=AnalysisResponse)
    async def analysis(builder: WorkflowBuilder = Depends(get_builder)) -> AnalysisResponse:
        return _analysis_response(builder)

    @app.get("/provider", response_model=ProviderResponse)
    async def get_provider(builder: WorkflowBuilder = Depends(get_builder)) -> ProviderResponse:
        return ProviderResponse(provider=builder.provider.value, choices=builder.provider.choices())

    @app.put("/provider", response_model=ProviderResponse)
    async def set_provider(
        payload: ProviderRequest,
        builder: WorkflowBuilder = Depends(get_builder),
    ) -> ProviderResponse:
        builder.provider.select(payload.provider)
        return ProviderResponse(provider=builder.provider.value, choices=builder.provider.choices())

    @app.post("/generate", response_model=ConfigResponse)
    async def generate(
        payload: GenerateRequest,
        builder: WorkflowBuilder = Depends(get_builder),
    ) -> ConfigResponse:
        await builder.generate_config(payload.provider)
        return _config_response(builder)

    @app.get("/config", response_model=ConfigResponse)
    async def get_config(builder: WorkflowBuilder = Depends(get_builder)) -> ConfigResponse:
        return _config_response(builder)

    @app.post("/config/close", response_model=ConfigResponse)
    async def close_config(builder: WorkflowBuilder = Depends(get_builder)) -> ConfigResponse:
        builder.generation.close_config()
        return _config_response(builder)

    @app.get("/graph", response_model=GraphResponse)
    async def get_graph(builder: WorkflowBuilder = Depends(get_builder)) -> GraphResponse:
        return _graph_response(builder)

    @app.post("/graph/nodes", response_model=NodeResponse, status_code=201)
    async def add_node(
        payload: NodeRequest,
        builder: WorkflowBuilder = Depends(get_builder),
    ) -> NodeResponse:
        key = builder.graph.add_node(
            NodeSpec(
                category=payload.category,
                label=payload.label,
                key=payload.key,
                properties=payload.properties,
            )
        )
        return NodeResponse(key=key)

    @app.post("/graph/links", response_model=GraphResponse, status_code=201)
    async def add_link(
        payload: LinkRequest,
        builder: WorkflowBuilder = Depends(get_builder),
    ) -> GraphResponse:
        builder.graph.link(payload.source, payload.target)
        return _graph_response(builder)

    @app.post("/graph/selection", response_model=SelectionResponse)
    async def select_nodes(
        payload: SelectionRequest,
        builder: WorkflowBuilder = Depends(get_builder),
    ) -> SelectionResponse:
        selection = builder.graph.select(payload.keys)
        return SelectionResponse(selection=sorted(selection))

    @app.delete("/graph/selection", response_model=DeleteResponse)
    async def delete_selection(builder: WorkflowBuilder = Depends(get_builder)) -> DeleteResponse:
        return DeleteResponse(removed=builder.graph.delete_selection())

    @app.post("/graph/clear", response_model=GraphResponse)
    async def clear_graph(builder: WorkflowBuilder = Depends(get_builder)) -> GraphResponse:
        builder.graph.clear_diagram()
        return _graph_response(builder)

    @app.exception_handler(KeyError)
    async def key_error_handler(_: Any, exc: KeyError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc.args[0]) if exc.args else ""})

    @app.exception_handler(ValueError)
    async def value_error_handler(_: Any, exc: ValueError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(
    config: PipegenConfig | None = None, host: str = "0.0.0.0", port: int = 8000
) -> None:  # pragma: no cover - integration path
    import uvicorn

    app = create_app(lambda: WorkflowBuilder(config))
    uvicorn.run(app, host=host, port=port)
