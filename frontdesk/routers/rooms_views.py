from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse
from ..exceptions import FrontDeskError
from ..models import User, RoomType
from ..security import require_user
from ..services.store import FrontDeskStore, get_store
from ..templating import templates, redirect_with

router = APIRouter(prefix="/app/rooms", tags=["rooms"])

@router.get("/", response_class=HTMLResponse)
def rooms_index(request: Request, user: User = Depends(require_user), store: FrontDeskStore = Depends(get_store)):
    rooms = store.list_rooms()
    return templates.TemplateResponse("rooms/index.html", {"request": request, "user": user, "rooms": rooms, "room_types": list(RoomType)})

@router.post("/new")
def rooms_create(user: User = Depends(require_user), store: FrontDeskStore = Depends(get_store), room_number: str = Form(""), type: str = Form(RoomType.AC.value)):
    if not room_number.strip().isdigit():
        return redirect_with("/app/rooms/", error="Please enter a room number.")
    try:
        room = store.add_room(int(room_number), type)
    except FrontDeskError as e:
        return redirect_with("/app/rooms/", error=e.detail)
    return redirect_with("/app/rooms/", msg=f"Room {room.room_number} added successfully.")

@router.post("/{room_id}/cleaning")
def rooms_cleaning(room_id: int, user: User = Depends(require_user), store: FrontDeskStore = Depends(get_store), is_clean: str = Form("no")):
    clean = is_clean.lower() in ("yes", "true", "1", "on")
    try:
        room = store.confirm_cleaning(room_id, clean)
    except FrontDeskError as e:
        return redirect_with("/app/rooms/", error=e.detail)
    if not clean:
        return redirect_with("/app/rooms/", msg=f"Room {room.room_number} is still marked for cleaning.")
    return redirect_with("/app/rooms/", msg=f"Room {room.room_number} marked as available.")
