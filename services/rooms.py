# backend/services/rooms.py

from dataclasses import dataclass

from google.api_core import exceptions as google_exceptions

from services.firebase import get_firestore

DEFAULT_BUILDING = "Unknown"
DEFAULT_FLOOR = "Unknown"


@dataclass(frozen=True)
class RoomInfo:
    name: str
    building: str = DEFAULT_BUILDING
    floor: str = DEFAULT_FLOOR

    def to_dict(self):
        return {"name": self.name, "building": self.building, "floor": self.floor}


def load_rooms(docs):
    """
    Build {room name: RoomInfo} from Firestore `rooms` documents (as dicts).
    """
    rooms = {}
    for data in docs:
        if not isinstance(data, dict):
            continue
        name = str(data.get("name") or "").strip()
        if not name:
            continue
        rooms[name] = RoomInfo(
            name=name,
            building=data.get("building") or DEFAULT_BUILDING,
            floor=data.get("floor") or DEFAULT_FLOOR,
        )
    return rooms


def fetch_rooms():
    """
    Read static room metadata from Firestore.
    Missing collection or API errors yield an empty mapping.
    """
    try:
        db = get_firestore()
        docs = db.collection("rooms").stream()
        return load_rooms(doc.to_dict() for doc in docs)
    except (google_exceptions.GoogleAPICallError, google_exceptions.RetryError) as e:
        print(f"Warning: Could not read rooms from Firestore: {e}")
        return {}


def room_info(rooms, name):
    return rooms.get(name) or RoomInfo(name=name)


def known_room_names(instructors, rooms):
    """
    Rooms named in metadata or referenced by any schedule, sorted.
    """
    names = set(rooms)
    for instructor in instructors:
        if instructor.live_session is not None:
            names.add(instructor.live_session.schedule.room.name)
        for session in instructor.history:
            names.add(session.schedule.room.name)
    names.discard("")
    return sorted(names)
