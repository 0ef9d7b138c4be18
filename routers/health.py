import logging
from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import text

from alembic.config import Config
from alembic.script import ScriptDirectory
from deps.params import get_store
from errors import StorageError
from repository import QuestionStore

logger = logging.getLogger("math-quiz")

router = APIRouter(prefix="/health", tags=["health"])

ALEMBIC_INI = Path(__file__).resolve().parent.parent / "alembic.ini"


@router.get("/db")
def health_db(store: QuestionStore = Depends(get_store)):
    try:
        store.ping()
        return {"ok": True}
    except StorageError as e:
        raise HTTPException(status_code=500, detail=f"db_error: {e.__cause__ or e}")


def _alembic_heads() -> list[str]:
    cfg = Config(str(ALEMBIC_INI))
    script = ScriptDirectory.from_config(cfg)
    return list(script.get_heads())


@router.get("/migrations")
def health_migrations(store: QuestionStore = Depends(get_store)):
    heads: list[str] = []
    db_ver = None
    try:
        heads = _alembic_heads()
    except Exception as e:
        logger.warning("Could not read alembic heads: %s", e)

    try:
        with store.engine.connect() as conn:
            try:
                db_ver = conn.execute(
                    text("SELECT version_num FROM alembic_version")
                ).scalar_one_or_none()
            except Exception as e:
                logger.warning("Could not read alembic_version: %s", e)
                db_ver = None
    except Exception as e:
        return {
            "ok": False,
            "error": f"db_connect_failed: {e}",
            "code_heads": heads,
            "db_version": db_ver,
        }

    synced = (db_ver in heads) if heads else False
    return {"ok": synced, "synced": synced, "db_version": db_ver, "code_heads": heads}
