"""Shared setup for API tests: an isolated SQLite app plus small row builders."""

from datetime import date
from decimal import Decimal

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from daysheets.api.auth import create_access_token
from daysheets.database import Base, get_db
from daysheets.main import app
from daysheets.models import (
    Artist,
    ArtistAssignment,
    Leg,
    LegPassenger,
    Option,
    Project,
    TourPersonnel,
    User,
    UserRole,
)
from daysheets.core.policies import Principal


def setup_app():
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    Session = sessionmaker(bind=engine, expire_on_commit=False)

    def override_db():
        db = Session()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_db
    return Session


def auth_headers(user: User) -> dict[str, str]:
    token = create_access_token({"sub": user.id})
    return {"Authorization": f"Bearer {token}"}


def principal_for(user: User, artist_ids=()) -> Principal:
    return Principal(
        user_id=user.id,
        email=user.email,
        role=user.role,
        full_name=user.full_name,
        artist_ids=frozenset(artist_ids),
    )


def make_user(db, email: str, role: UserRole = UserRole.AGENT, artists=()) -> User:
    user = User(email=email, full_name=email.split("@")[0].title(), role=role)
    db.add(user)
    db.flush()
    for artist in artists:
        db.add(ArtistAssignment(user_id=user.id, artist_id=artist.id))
    db.commit()
    db.refresh(user)
    return user


def make_tour(db, passengers=("Ann Lee", "Bob Ray"), individuals=(), departure=date(2026, 11, 2)):
    """Artist, project and one LAX → JFK leg with the named passengers on it.

    ``individuals`` lists names flagged ``treat_as_individual``.
    """
    artist = Artist(name="The Band")
    project = Project(artist=artist, name="Fall Tour")
    leg = Leg(
        project=project,
        label="Show 1",
        origin_city="Los Angeles",
        destination_city="New York",
        departure_date=departure,
    )
    db.add_all([artist, project, leg])
    db.flush()
    people = []
    for name in passengers:
        person = TourPersonnel(project_id=project.id, full_name=name)
        db.add(person)
        db.flush()
        db.add(LegPassenger(leg_id=leg.id, passenger_id=person.id, treat_as_individual=name in individuals))
        people.append(person)
    db.commit()
    return artist, project, leg, people


def make_option(db, leg: Leg, name: str = "Option A", price: str = "450.00", currency: str = "USD") -> Option:
    option = Option(leg_id=leg.id, name=name, price_total=Decimal(price), price_currency=currency)
    db.add(option)
    db.commit()
    db.refresh(option)
    return option
