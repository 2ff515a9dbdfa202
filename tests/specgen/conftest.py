import pytest

from services.specgen.app.config import SpecgenSettings
from services.specgen.app.domain.types import UserStoryInput


@pytest.fixture
def settings() -> SpecgenSettings:
    return SpecgenSettings()


@pytest.fixture
def story() -> UserStoryInput:
    return UserStoryInput(
        id="US-042",
        narrative="As a member, I want to view my upcoming reservations",
        persona="member",
        feature_area="reservations",
        acceptance_criteria=["Shows reservations sorted by date", "Hides cancelled reservations"],
        priority="P1",
    )
