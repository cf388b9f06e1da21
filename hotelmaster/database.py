"""
数据库配置 - 关系型存储持久化层
所有请求共享同一个存储；预订生命周期操作各自运行在一个事务中
"""
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, declarative_base

from hotelmaster.config import settings

SQLALCHEMY_DATABASE_URL = settings.DATABASE_URL

_is_sqlite = SQLALCHEMY_DATABASE_URL.startswith("sqlite")

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False} if _is_sqlite else {},
    pool_pre_ping=not _is_sqlite,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def enable_sqlite_write_locks(bind) -> None:
    """
    让 SQLite 事务以 BEGIN IMMEDIATE 开始

    pysqlite 默认延迟到第一条写语句才加锁，两个请求可能同时读到“房间可用”。
    立即加写锁后，事务内的“先读后写”与其他写事务串行执行。
    其他数据库使用 SELECT ... FOR UPDATE（见生命周期服务）。
    """
    @event.listens_for(bind, "connect")
    def _disable_pysqlite_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(bind, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


if _is_sqlite:
    enable_sqlite_write_locks(engine)


def get_db():
    """依赖注入：获取数据库会话"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """初始化数据库表"""
    from hotelmaster.models import ontology  # noqa
    Base.metadata.create_all(bind=engine)

    if _is_sqlite:
        # 启用 WAL 模式以提高并发读性能（不能在事务内切换，走原始连接）
        raw = engine.raw_connection()
        try:
            cursor = raw.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA synchronous=NORMAL")
            cursor.close()
        finally:
            raw.close()
