import pytest

from app import create_app
from services.engine import EnergyEngine
from services.rooms import RoomInfo


def _pzem(energy="0.50", timestamp="2024_03_10_140500", power="150.00", **extra):
    node = {
        "current": "0.65",
        "voltage": "230.1",
        "power": power,
        "frequency": "60.0",
        "powerFactor": "0.98",
        "energy": energy,
        "timestamp": timestamp,
    }
    node.update(extra)
    return node


def _schedule(room="705", pzem=None, subject="Data Structures", subject_code="CS201", section="BSCS-2A"):
    room_node = room if pzem is None else {"name": room, "pzem": pzem}
    return {
        "day": "Sunday",
        "startTime": "13:00",
        "endTime": "14:30",
        "section": section,
        "subject": subject,
        "subjectCode": subject_code,
        "roomName": room_node,
    }


def _session(schedule, date_time, status="Class Ended"):
    return {"Status": status, "dateTime": date_time, "schedule": schedule}


def _access(action, status, timestamp):
    return {"action": action, "status": status, "timestamp": timestamp}


@pytest.fixture
def make_pzem():
    return _pzem


@pytest.fixture
def make_schedule():
    return _schedule


@pytest.fixture
def make_session():
    return _session


@pytest.fixture
def make_access():
    return _access


@pytest.fixture
def campus_snapshot():
    """
    Two instructors sharing room 705; one still teaching in 705 live.
    """
    return {
        "inst_santos": {
            "Profile": {"fullName": "Maria Santos"},
            "ClassStatus": _session(
                _schedule(pzem=_pzem(energy="0.90", timestamp="2024_03_10_170000")),
                "2024_03_10_160000",
                status="Class In Session",
            ),
            "ClassHistory": {
                "h1": _session(
                    _schedule(pzem=_pzem(energy="0.30", timestamp="2024_03_10_100000")),
                    "2024_03_10_090000",
                ),
            },
            "AccessLogs": {
                "log1": _access("Access", "granted", "2024_03_10_080000"),
            },
        },
        "inst_reyes": {
            "Profile": {"fullName": "Jose Reyes"},
            "ClassHistory": {
                "h7": _session(
                    _schedule(
                        pzem=_pzem(energy="0.50", timestamp="2024_03_10_143000"),
                        subject="Networks",
                        subject_code="IT310",
                        section="BSIT-3B",
                    ),
                    "2024_03_10_120000",
                ),
            },
            "AccessLogs": {
                "log1": _access("Access", "granted", "2024_03_10_130000"),
                "log2": _access("Access", "denied", "2024_03_10_135000"),
            },
        },
        "inst_cruz": {
            "Profile": {"fullName": "Ana Cruz"},
            "ClassStatus": _session(
                _schedule(room="801", pzem=_pzem(energy="0.20", timestamp="2024_03_10_091500")),
                "2024_03_10_080000",
                status="Class In Session",
            ),
        },
    }


@pytest.fixture
def engine(campus_snapshot):
    return EnergyEngine(
        snapshot_loader=lambda: campus_snapshot,
        rooms_loader=lambda: {"705": RoomInfo("705", "GLE Building", "7th Floor")},
        strategy="samples",
    )


@pytest.fixture
def client(engine):
    app = create_app({"TESTING": True, "ENGINE": engine, "RECORD_WINDOW_HOURS": 24.0})
    return app.test_client()
