import uuid
from datetime import datetime
from typing import List, Optional

from fastapi import HTTPException, status
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from agent_chat.app.db import models
from agent_chat.app.schemas.thread import ThreadCreate, ThreadUpdate

DEFAULT_THREAD_TITLE = "New conversation"

_MESSAGE_TYPES = {
    models.MessageRole.USER: models.MessageType.HUMAN,
    models.MessageRole.ASSISTANT: models.MessageType.AI,
    models.MessageRole.SYSTEM: models.MessageType.SYSTEM,
}


def _ensure_user(db: Session, user_id: str) -> models.User:
    user = db.get(models.User, user_id)
    if user is None:
        user = models.User(user_id=user_id)
        db.add(user)
        db.flush()
    return user


def create_thread(db: Session, user_id: str, data: ThreadCreate) -> models.Thread:
    _ensure_user(db, user_id)
    title = (data.title or "").strip() or DEFAULT_THREAD_TITLE
    thread = models.Thread(
        id=str(uuid.uuid4()),
        user_id=user_id,
        title=title,
        system_prompt=data.system_prompt,
        status=models.ThreadStatus.ACTIVE,
    )
    db.add(thread)
    db.commit()
    db.refresh(thread)
    return thread


def list_threads(db: Session, user_id: str) -> List[models.Thread]:
    stmt = (
        select(models.Thread)
        .where(models.Thread.user_id == user_id, models.Thread.deleted_at.is_(None))
        .order_by(models.Thread.updated_at.desc())
    )
    return list(db.scalars(stmt).all())


def get_thread(db: Session, user_id: str, thread_id: str) -> models.Thread:
    stmt = select(models.Thread).where(
        models.Thread.id == thread_id,
        models.Thread.user_id == user_id,
        models.Thread.deleted_at.is_(None),
    )
    thread = db.scalars(stmt).first()
    if not thread:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Thread not found")
    return thread


def update_thread(db: Session, user_id: str, thread_id: str, data: ThreadUpdate) -> models.Thread:
    thread = get_thread(db, user_id, thread_id)
    for field in ("title", "system_prompt", "status"):
        value = getattr(data, field)
        if value is not None:
            setattr(thread, field, value)
    thread.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(thread)
    return thread


def delete_thread(db: Session, user_id: str, thread_id: str) -> models.Thread:
    thread = get_thread(db, user_id, thread_id)
    thread.status = models.ThreadStatus.DELETED
    thread.deleted_at = datetime.utcnow()
    db.commit()
    db.refresh(thread)
    return thread


def count_messages(db: Session, thread_id: str) -> int:
    stmt = select(func.count(models.Message.id)).where(
        models.Message.thread_id == thread_id, models.Message.deleted_at.is_(None)
    )
    return db.scalar(stmt) or 0


def last_message(db: Session, thread_id: str) -> Optional[models.Message]:
    stmt = (
        select(models.Message)
        .where(models.Message.thread_id == thread_id, models.Message.deleted_at.is_(None))
        .order_by(models.Message.seq.desc())
        .limit(1)
    )
    return db.scalars(stmt).first()


def list_messages(db: Session, thread_id: str, limit: Optional[int] = None) -> List[models.Message]:
    """Messages in insertion order. With `limit`, only the newest `limit` of them."""
    stmt = select(models.Message).where(models.Message.thread_id == thread_id, models.Message.deleted_at.is_(None))
    if limit is None:
        return list(db.scalars(stmt.order_by(models.Message.seq.asc())).all())
    if limit <= 0:
        return []
    newest = list(db.scalars(stmt.order_by(models.Message.seq.desc()).limit(limit)).all())
    return list(reversed(newest))


def _next_seq(db: Session, thread_id: str) -> int:
    current = db.scalar(select(func.max(models.Message.seq)).where(models.Message.thread_id == thread_id))
    return (current or 0) + 1


def create_message(
    db: Session,
    thread: models.Thread,
    role: models.MessageRole,
    content: List[dict],
    user_id: Optional[str] = None,
    commit: bool = True,
) -> models.Message:
    message = models.Message(
        id=str(uuid.uuid4()),
        thread_id=thread.id,
        user_id=user_id,
        role=role,
        type=_MESSAGE_TYPES[role],
        content=content,
        seq=_next_seq(db, thread.id),
    )
    db.add(message)
    thread.updated_at = datetime.utcnow()
    db.flush()
    if commit:
        db.commit()
        db.refresh(message)
    return message


def get_stats(db: Session, user_id: str) -> dict:
    total_threads = db.scalar(
        select(func.count(models.Thread.id)).where(
            models.Thread.user_id == user_id, models.Thread.deleted_at.is_(None)
        )
    )
    active_threads = db.scalar(
        select(func.count(models.Thread.id)).where(
            models.Thread.user_id == user_id,
            models.Thread.status == models.ThreadStatus.ACTIVE,
            models.Thread.deleted_at.is_(None),
        )
    )
    total_messages = db.scalar(
        select(func.count(models.Message.id)).where(
            models.Message.user_id == user_id, models.Message.deleted_at.is_(None)
        )
    )
    return {
        "total_threads": total_threads or 0,
        "active_threads": active_threads or 0,
        "total_messages": total_messages or 0,
    }
