"""Entity store: name-keyed CRUD, conditional writes and guarded increments"""

import uuid

import pytest

from bean.core.exceptions import BadRequestException, NotFoundException
from bean.store import EntityStore

from conftest import make_customer, make_user

async def test_unknown_entity_is_rejected(db):
    store = EntityStore(db)
    with pytest.raises(BadRequestException) as exc:
        await store.filter("Espresso", {})
    assert exc.value.error_code == "UNKNOWN_ENTITY"

async def test_unknown_field_is_rejected(db):
    store = EntityStore(db)
    with pytest.raises(BadRequestException) as exc:
        await store.filter("Customer", {"favourite_drink": "mocha"})
    assert exc.value.error_code == "UNKNOWN_FIELD"

async def test_create_get_update_delete(db):
    store = EntityStore(db)
    reward = await store.create("Reward", {
        "name": "Free Latte",
        "category": "Drinks",
        "points_required": 150,
    })
    await db.commit()

    loaded = await store.get("Reward", str(reward.id))
    assert loaded.name == "Free Latte"

    await store.update("Reward", reward.id, {"points_required": 120})
    await db.commit()
    assert (await store.get("Reward", reward.id, refresh=True)).points_required == 120

    await store.delete("Reward", reward.id)
    await db.commit()
    assert await store.get("Reward", reward.id, refresh=True) is None

async def test_get_with_malformed_id_returns_none(db):
    assert await EntityStore(db).get("Reward", "not-a-uuid") is None

async def test_update_missing_record_raises(db):
    with pytest.raises(NotFoundException):
        await EntityStore(db).update("Reward", uuid.uuid4(), {"name": "Ghost"})

async def test_filter_sort_and_limit(db):
    store = EntityStore(db)
    for name, points in [("Cookie", 80), ("Mug", 600), ("Latte", 150)]:
        await store.create("Reward", {"name": name, "category": "Food", "points_required": points})
    await db.commit()

    cheapest = await store.filter("Reward", {"category": "Food"}, sort="points_required", limit=2)
    assert [reward.name for reward in cheapest] == ["Cookie", "Latte"]

    priciest = await store.list("Reward", sort="-points_required", limit=1)
    assert priciest[0].name == "Mug"

    some = await store.filter("Reward", {"name": ["Mug", "Cookie"]})
    assert {reward.name for reward in some} == {"Mug", "Cookie"}

async def test_update_where_only_applies_while_expected_holds(db):
    store = EntityStore(db)
    reward = await store.create("Reward", {"name": "Scone", "category": "Food", "points_required": 90})
    await db.commit()

    assert await store.update_where("Reward", reward.id, {"is_active": True}, {"is_active": False})
    assert not await store.update_where("Reward", reward.id, {"is_active": True}, {"is_active": False})
    await db.commit()

    assert (await store.get("Reward", reward.id, refresh=True)).is_active is False

async def test_increment_respects_minimums(db):
    user = await make_user("mina@beancoffee.com")
    customer = await make_customer(user)
    store = EntityStore(db)

    assert await store.increment("Customer", customer.id, {"points_balance": -30}, minimums={"points_balance": 30})
    # Only 20 left after the welcome bonus of 50
    assert not await store.increment("Customer", customer.id, {"points_balance": -30}, minimums={"points_balance": 30})
    await db.commit()

    reloaded = await store.get("Customer", customer.id, refresh=True)
    assert reloaded.points_balance == 20
