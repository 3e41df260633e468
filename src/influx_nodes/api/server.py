from typing import List
from fastapi import FastAPI, HTTPException
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from ..domain.errors import UnknownNode
from ..runtime.flow_runtime import FlowRuntime
from .schemas import InjectRequest, InjectResponse, NodeInfo
import structlog

logger = structlog.get_logger()

def create_app(runtime: FlowRuntime) -> FastAPI:
    """
    Factory to create FastAPI app with injected dependencies.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("api_startup", nodes=len(runtime.nodes))
        yield
        runtime.close()
        logger.info("api_shutdown")

    app = FastAPI(lifespan=lifespan)

    @app.get("/nodes", response_model=List[NodeInfo])
    async def list_nodes():
        return [NodeInfo(id=node.id, type=node.type, name=node.name) for node in runtime.nodes]

    @app.post("/nodes/{node_id}/inject", response_model=InjectResponse)
    async def inject(node_id: str, request: InjectRequest):
        msg = request.model_dump(exclude_unset=True)
        logger.info("api_inject", node_id=node_id, keys=sorted(msg))
        try:
            result = await runtime.inject(node_id, msg)
        except UnknownNode as e:
            raise HTTPException(status_code=404, detail=str(e))

        if not result.ok:
            failure = result.failures[0]
            response = InjectResponse(
                status="error",
                messages=result.messages,
                error=failure.error,
                message=failure.message,
            )
            return JSONResponse(status_code=422, content=jsonable_encoder(response))

        return InjectResponse(status="success", messages=result.messages)

    return app
