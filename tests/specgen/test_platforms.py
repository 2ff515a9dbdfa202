from services.specgen.app.domain.platforms import (
    PLATFORM_CONFIG,
    PLATFORM_PROMPTS,
    PlatformId,
    estimate_generation_time,
    get_platform_info,
    resolve_platform,
)


def test_registry_covers_every_platform():
    assert set(PLATFORM_CONFIG) == set(PlatformId)
    assert set(PLATFORM_PROMPTS) == set(PlatformId)
    assert [p.value for p in PlatformId] == ["A", "B", "C", "D"]


def test_get_platform_info_accepts_raw_id():
    assert get_platform_info("B").name == "Mobile App"
    assert get_platform_info(PlatformId.infrastructure).icon == "⚙️"


def test_resolve_platform_understands_ids_names_and_icons():
    assert resolve_platform("a") is PlatformId.backend
    assert resolve_platform("Admin Dashboard") is PlatformId.admin
    assert resolve_platform("📱") is PlatformId.mobile
    assert resolve_platform("⚙") is PlatformId.infrastructure
    assert resolve_platform("infrastructure") is PlatformId.infrastructure
    assert resolve_platform("Z") is None
    assert resolve_platform(3) is None


def test_estimate_generation_time():
    assert estimate_generation_time([]) == 15
    assert estimate_generation_time(["A"]) == 15
    assert estimate_generation_time(["A", "B", "C"]) == 25
