from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, RedirectResponse
from loguru import logger

from app.api.endpoints import router as api_router
from app.api.ui import router as ui_router
from app.core.config import settings
from app.core.exceptions import DashboardError
from app.core.log_config import setup_logging
from app.services.session_service import DashboardSession


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="视频聊天房间 CSV 导出分析看板",
        docs_url="/api/docs",
        openapi_url="/api/openapi.json",
        redoc_url="/api/redoc",
    )
    # 每个进程一份会话，数据只放内存，重启即清空
    app.state.session = DashboardSession()
    app.include_router(api_router, prefix="/api")
    app.include_router(ui_router, prefix="/api")

    @app.exception_handler(DashboardError)
    async def dashboard_error_handler(request: Request, exc: DashboardError):
        logger.warning(f"{request.method} {request.url.path} 失败: {exc.message}")
        return JSONResponse(status_code=400, content={"status": "error", "message": exc.message})

    @app.get("/", include_in_schema=False)
    def index():
        return RedirectResponse("/api/ui/upload")

    return app


setup_logging()
app = create_app()
logger.info(f"{settings.PROJECT_NAME} 已启动，入口: /api/ui/upload")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host=settings.HOST, port=settings.PORT, reload=True)
