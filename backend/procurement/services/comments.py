from __future__ import annotations
from typing import List
from flask import current_app
from procurement import get_db
from procurement.models.comment import Comment
from procurement.utils.persistence import commit_or_raise
from procurement.utils.validation import require_text
from procurement.services.orders import get_order


def add_comment(order_id: int, user_id: int, user_name: str, text) -> Comment:
    """Append a note to an order's thread. Comments are never edited or deleted."""
    text = require_text(text, 'comment')
    get_order(order_id)
    session = get_db()
    comment = Comment(order_id=order_id, user_id=user_id, user_name=user_name, comment=text)
    session.add(comment)
    commit_or_raise(session, 'comment')
    current_app.logger.debug('Comment %s added to order %s by %s', comment.id, order_id, user_id)
    return comment


def list_comments(order_id: int) -> List[Comment]:
    get_order(order_id)
    q = get_db().query(Comment).filter(Comment.order_id == order_id)
    return q.order_by(Comment.created_at.asc(), Comment.id.asc()).all()
