from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.db.models.user import User
from app.core.auth_guard import get_current_user
from app.schemas.mentorship import ConversationCreate, ConversationResponse, MessageCreate, MessageResponse
from app.services import messaging

router = APIRouter(prefix="/api/conversations", tags=["conversations"])


@router.get("", response_model=List[ConversationResponse])
def list_conversations(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return messaging.list_conversations_for_user(db, user.id)


@router.post("", response_model=ConversationResponse)
def open_conversation(
    body: ConversationCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return messaging.get_or_create_conversation(db, user.id, body.participant_id)


@router.get("/{conversation_id}/messages", response_model=List[MessageResponse])
def get_messages(conversation_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    messaging.get_conversation_for(db, conversation_id, user)
    return messaging.list_messages(db, conversation_id=conversation_id)


@router.post("/{conversation_id}/messages", response_model=MessageResponse, status_code=201)
def post_message(
    conversation_id: int,
    body: MessageCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return messaging.send_direct_message(db, conversation_id, user, body.content)
