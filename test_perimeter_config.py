"""
Work zone seeding and manager updates at the service level.
"""

import threading

from fastapi.testclient import TestClient
from sqlmodel import Session, select

from models.work_zone import PRIMARY_ZONE_ID, WorkZone
from services.perimeter_config import PerimeterUpdate, get_active_perimeter, get_work_zone, update_perimeter


def test_first_read_seeds_default_zone(session):
    perimeter = get_active_perimeter(session)

    assert (perimeter.center.latitude, perimeter.center.longitude) == (37.7749, -122.4194)
    assert perimeter.radius_km == 2
    assert session.get(WorkZone, PRIMARY_ZONE_ID).updated_by == "system"


def test_simultaneous_first_reads_seed_one_zone(file_engine):
    readers = 6
    barrier = threading.Barrier(readers)
    zone_ids = []
    errors = []

    def read_zone():
        try:
            with Session(file_engine) as session:
                barrier.wait()
                zone_ids.append(get_work_zone(session).id)
        except Exception as e:
            errors.append(type(e).__name__)

    threads = [threading.Thread(target=read_zone) for _ in range(readers)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    assert zone_ids == [PRIMARY_ZONE_ID] * readers
    with Session(file_engine) as session:
        assert len(session.exec(select(WorkZone)).all()) == 1


def test_partial_update_keeps_other_fields(session):
    zone = update_perimeter(session, PerimeterUpdate(radius_km=0.5), "manager-1")

    assert zone.radius_km == 0.5
    assert (zone.center_lat, zone.center_lng) == (37.7749, -122.4194)
    assert zone.updated_by == "manager-1"
    assert get_active_perimeter(session).radius_km == 0.5


def test_startup_seeds_zone(file_engine, monkeypatch):
    import main

    monkeypatch.setattr(main, "engine", file_engine)

    with TestClient(main.app):
        pass

    with Session(file_engine) as session:
        assert session.get(WorkZone, PRIMARY_ZONE_ID) is not None
