"""
Hotel Master 主应用入口
酒店后台：房间、客人、预订生命周期与仪表盘
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from hotelmaster.config import settings
from hotelmaster.database import init_db, SessionLocal
from hotelmaster.routers import auth, rooms, customers, reservations, dashboard
from hotelmaster.routers import settings as settings_router

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理：建表并初始化默认管理员"""
    init_db()

    from hotelmaster.services.user_service import UserService
    seed_db = SessionLocal()
    try:
        UserService(seed_db).seed_default_admin()
    finally:
        seed_db.close()

    logger.info(f"{settings.APP_NAME} {settings.APP_VERSION} started")
    yield


# 创建应用
app = FastAPI(
    title=settings.APP_NAME,
    description="酒店后台管理系统：预订生命周期与房态管理",
    version=settings.APP_VERSION,
    lifespan=lifespan
)

# CORS 配置
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # 生产环境应限制具体域名
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 注册路由
app.include_router(auth.router)
app.include_router(rooms.router)
app.include_router(customers.router)
app.include_router(reservations.router)
app.include_router(dashboard.router)
app.include_router(settings_router.router)


@app.get("/")
def root():
    """根路径"""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
    }


@app.get("/health")
def health_check():
    """健康检查"""
    return {"status": "healthy"}
