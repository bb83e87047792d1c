from tarotdesk.db.database import get_session, init_db
from tarotdesk.db.operations import (
    create_profile,
    draw_record_to_model,
    get_profile,
    count_draw_records,
    list_all_drawn_cards,
    list_draw_records,
    list_profile_stats,
    model_to_draw_record_row,
)

__all__ = [
    "create_profile",
    "draw_record_to_model",
    "get_profile",
    "get_session",
    "init_db",
    "count_draw_records",
    "list_all_drawn_cards",
    "list_draw_records",
    "list_profile_stats",
    "model_to_draw_record_row",
]
