#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
FastAPI 应用主入口
"""

import os
import time
import json
import logging

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import Response


# 自定义UTF-8 JSONResponse类，确保中文正确编码 + 强制不缓存
class UTF8JSONResponse(Response):
    media_type = "application/json; charset=utf-8"

    def __init__(self, content, **kwargs):
        super().__init__(content, **kwargs)
        # 强制禁用所有缓存
        self.headers["Cache-Control"] = "no-cache, no-store, must-revalidate, max-age=0"
        self.headers["Pragma"] = "no-cache"
        self.headers["Expires"] = "0"

    def render(self, content) -> bytes:
        return json.dumps(
            content,
            ensure_ascii=False,  # 关键：不转义非ASCII字符
            allow_nan=False,
            indent=None,
            separators=(",", ":"),
        ).encode("utf-8")


project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

# 优先加载 .env 文件（必须在读取配置之前）
env_path = os.path.join(project_root, '.env')
if os.path.exists(env_path):
    load_dotenv(env_path, override=True)

# 配置日志（必须在导入路由之前初始化）
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

from server.api.v1.life_kline import router as life_kline_router  # noqa: E402
from server.config.env_config import get_env, get_env_config, is_local_dev  # noqa: E402
from server.utils.exception_handler import ExceptionHandlerMiddleware  # noqa: E402


app = FastAPI(
    title="Life K-Line API",
    description="八字排盘与人生K线生成API服务",
    version="1.0.0",
    default_response_class=UTF8JSONResponse  # 使用UTF-8编码的JSON响应
)


# 添加请求日志中间件
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """记录请求日志，包括处理时间"""
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time

    logger.info(
        f"{request.method} {request.url.path} - "
        f"Status: {response.status_code} - "
        f"Time: {process_time:.3f}s - "
        f"Client: {request.client.host if request.client else 'unknown'}"
    )

    response.headers["X-Process-Time"] = str(process_time)
    return response

# 添加CORS中间件
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # 生产环境应限制具体域名
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 添加GZip压缩中间件
app.add_middleware(GZipMiddleware, minimum_size=1000)

# 统一异常处理中间件（最后添加，确保能捕获所有异常）
app.add_middleware(ExceptionHandlerMiddleware)

# 注册路由
app.include_router(life_kline_router, prefix="/api/v1", tags=["人生K线"])


@app.get("/healthz", tags=["health"])
def health_check():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    port = get_env_config().get_int_config("PORT", 8001)
    logger.info(f"启动 Life K-Line API: env={get_env()}, port={port}")
    uvicorn.run(
        "server.main:app",
        host=get_env_config().get_config("HOST", "0.0.0.0"),
        port=port,
        reload=is_local_dev(),
    )
