# Insert the Default Work Zone
from sqlmodel import Session, SQLModel

import models  # noqa: F401  (registers every table)
from db.session import engine
from services.perimeter_config import get_work_zone


def seed_work_zone():
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        zone = get_work_zone(session)
        print(
            f"Work zone '{zone.name}': ({zone.center_lat}, {zone.center_lng}), "
            f"radius {zone.radius_km}km"
        )


if __name__ == "__main__":
    seed_work_zone()
