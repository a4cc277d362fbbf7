"""Application tests for the category tree: nesting, ordering and drag-and-drop."""

import pytest
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain
from storefront.category.category import Category
from storefront.category.hierarchy import ReorderCategories, category_tree
from storefront.category.management import CreateCategory, DeleteCategory, UpdateCategory


def _create(slug, name_vi, **extra):
    return current_domain.process(CreateCategory(slug=slug, name_vi=name_vi, **extra), asynchronous=False)


def _drop(dragged_id, target_id, position):
    return current_domain.process(
        ReorderCategories(dragged_id=dragged_id, target_id=target_id, position=position), asynchronous=False
    )


def _get(category_id) -> Category:
    return current_domain.repository_for(Category).get(category_id)


def _names(nodes):
    return [n["name"] for n in nodes]


@pytest.fixture()
def shelves():
    """Ghế (with two sub-shelves), Bàn and Tủ at the top level."""
    ghe = _create("ghe", "Ghế")
    ban = _create("ban", "Bàn")
    tu = _create("tu", "Tủ")
    ghe_van_phong = _create("ghe-van-phong", "Ghế văn phòng", parent_id=ghe)
    ghe_sofa = _create("ghe-sofa", "Ghế sofa", parent_id=ghe)
    return {"ghe": ghe, "ban": ban, "tu": tu, "ghe_van_phong": ghe_van_phong, "ghe_sofa": ghe_sofa}


class TestCreateInTree:
    def test_new_categories_are_appended_to_their_siblings(self, shelves):
        assert [_get(shelves[k]).sort_order for k in ("ghe", "ban", "tu")] == [0, 1, 2]
        assert [_get(shelves[k]).sort_order for k in ("ghe_van_phong", "ghe_sofa")] == [0, 1]

    def test_unknown_parent_is_rejected(self):
        with pytest.raises(ValidationError) as exc:
            _create("ke", "Kệ", parent_id="missing")
        assert "parent_id" in exc.value.messages


class TestTreeRead:
    def test_nests_children_in_sibling_order(self, shelves):
        tree = category_tree()

        assert _names(tree) == ["Ghế", "Bàn", "Tủ"]
        assert _names(tree[0]["children"]) == ["Ghế văn phòng", "Ghế sofa"]
        assert tree[0]["children"][0]["parent_id"] == shelves["ghe"]

    def test_hidden_category_hides_its_subtree_from_shoppers(self, shelves):
        current_domain.process(UpdateCategory(category_id=shelves["ghe"], is_active=False), asynchronous=False)

        assert _names(category_tree()) == ["Bàn", "Tủ"]
        admin_tree = category_tree(include_inactive=True)
        assert _names(admin_tree) == ["Ghế", "Bàn", "Tủ"]
        assert admin_tree[0]["is_active"] is False
        assert len(admin_tree[0]["children"]) == 2


class TestReorder:
    def test_before_places_dragged_ahead_of_target(self, shelves):
        _drop(shelves["tu"], shelves["ghe"], "before")
        assert _names(category_tree()) == ["Tủ", "Ghế", "Bàn"]

    def test_after_places_dragged_behind_target(self, shelves):
        _drop(shelves["ghe"], shelves["ban"], "after")
        assert _names(category_tree()) == ["Bàn", "Ghế", "Tủ"]

    def test_inside_makes_dragged_the_first_child(self, shelves):
        result = _drop(shelves["tu"], shelves["ghe"], "inside")

        assert result == {"parent_id": shelves["ghe"], "sort_order": 0}
        tree = category_tree()
        assert _names(tree) == ["Ghế", "Bàn"]
        assert _names(tree[0]["children"]) == ["Tủ", "Ghế văn phòng", "Ghế sofa"]
        assert [_get(shelves[k]).sort_order for k in ("ghe", "ban")] == [0, 1]

    def test_moving_out_of_a_parent_closes_the_gap(self, shelves):
        _drop(shelves["ghe_van_phong"], shelves["ban"], "after")

        assert _get(shelves["ghe_van_phong"]).parent_id is None
        assert _get(shelves["ghe_sofa"]).sort_order == 0
        assert _names(category_tree()) == ["Ghế", "Bàn", "Ghế văn phòng", "Tủ"]

    def test_cannot_drop_a_parent_inside_its_own_child(self, shelves):
        with pytest.raises(ValidationError):
            _drop(shelves["ghe"], shelves["ghe_sofa"], "inside")
        assert _get(shelves["ghe"]).parent_id is None

    def test_cannot_drop_on_itself(self, shelves):
        with pytest.raises(ValidationError):
            _drop(shelves["ban"], shelves["ban"], "before")

    def test_unknown_position_is_rejected(self, shelves):
        with pytest.raises(ValidationError):
            _drop(shelves["ban"], shelves["tu"], "below")


class TestReparentAndDelete:
    def test_update_moves_to_end_of_new_parent(self, shelves):
        current_domain.process(UpdateCategory(category_id=shelves["ban"], parent_id=shelves["ghe"]), asynchronous=False)

        assert _names(category_tree()[0]["children"]) == ["Ghế văn phòng", "Ghế sofa", "Bàn"]
        assert _get(shelves["tu"]).sort_order == 1

    def test_update_can_return_to_the_top_level(self, shelves):
        current_domain.process(
            UpdateCategory(category_id=shelves["ghe_sofa"], to_top_level=True), asynchronous=False
        )
        assert _names(category_tree()) == ["Ghế", "Bàn", "Tủ", "Ghế sofa"]

    def test_update_cannot_create_a_cycle(self, shelves):
        with pytest.raises(ValidationError):
            current_domain.process(
                UpdateCategory(category_id=shelves["ghe"], parent_id=shelves["ghe_van_phong"]), asynchronous=False
            )

    def test_deleting_a_parent_lifts_its_children(self, shelves):
        current_domain.process(DeleteCategory(category_id=shelves["ghe"]), asynchronous=False)

        assert _names(category_tree()) == ["Bàn", "Tủ", "Ghế văn phòng", "Ghế sofa"]
        assert [_get(shelves[k]).sort_order for k in ("ban", "tu", "ghe_van_phong", "ghe_sofa")] == [0, 1, 2, 3]
