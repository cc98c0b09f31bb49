"""Notes API endpoints."""
import json

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.api.deps import ensure_owner, get_current_user, get_db
from app.models.note import Note
from app.models.user import User
from app.schemas.note import NoteCreate, NoteResponse, NoteUpdate
from app.schemas.transaction import DeleteResponse
from app.services.errors import NotFound

router = APIRouter(prefix="/notes", tags=["notes"])


def _get_owned_note(db: Session, note_id: str, user: User) -> Note:
    note = db.query(Note).filter(Note.id == note_id).first()
    if not note:
        raise NotFound("Note not found")
    ensure_owner(note, user)
    return note


@router.post("", response_model=NoteResponse, status_code=status.HTTP_201_CREATED)
def create_note(
    data: NoteCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Create a note."""
    note = Note(
        user_id=current_user.id,
        title=data.title,
        content=data.content,
        tags=json.dumps(data.tags),
        is_pinned=data.is_pinned,
        color=data.color,
    )
    db.add(note)
    db.commit()
    db.refresh(note)
    return note


@router.get("", response_model=list[NoteResponse])
def list_notes(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """List notes, pinned first."""
    return (
        db.query(Note)
        .filter(Note.user_id == current_user.id)
        .order_by(Note.is_pinned.desc(), Note.updated_at.desc())
        .all()
    )


@router.put("/{note_id}", response_model=NoteResponse)
def update_note(
    note_id: str,
    data: NoteUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Update any subset of a note's fields."""
    note = _get_owned_note(db, note_id, current_user)

    updates = data.model_dump(exclude_unset=True)
    if "tags" in updates:
        updates["tags"] = json.dumps(updates["tags"] or [])
    for field, value in updates.items():
        if value is None and field in ("title", "content", "is_pinned", "color"):
            continue
        setattr(note, field, value)

    db.commit()
    db.refresh(note)
    return note


@router.delete("/{note_id}", response_model=DeleteResponse)
def delete_note(
    note_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Delete a note."""
    note = _get_owned_note(db, note_id, current_user)
    db.delete(note)
    db.commit()
    return DeleteResponse(message="Note removed")
