"""
Tests for the hierarchy service.

Covers:
- Create: type dispatch, attribute collection, parent resolution
- Validation happening before any store write
- Update: field patches, attribute merge, reparenting and cycle checks
- Delete: cascade over the whole subtree, all or nothing
- Queries: all, by id, children, search
"""
import pytest

from cvnodes.exceptions import NodeConflict, NodeNotFound, NodeValidationError
from cvnodes.forms import (
    CreateCategoryCommand,
    CreateItemCommand,
    CreateProfileCommand,
    CreateSkillCommand,
    UpdateNodeCommand,
)
from cvnodes.models import CvNode, CvNodeQuerySet, NodeType
from cvnodes.services import merge_attributes

pytestmark = pytest.mark.django_db


def update(service, **payload):
    return service.update(UpdateNodeCommand(payload))


class TestCreate:
    def test_round_trip(self, service):
        created = service.create(
            CreateItemCommand(
                {
                    "id": "job",
                    "label": "Developer",
                    "description": "Backend work",
                    "company": "Acme",
                    "dateRange": "2020 - 2024",
                    "positionX": 400,
                    "positionY": 300,
                }
            )
        )
        fetched = service.get("job")
        assert fetched == created
        assert fetched.type == NodeType.ITEM
        assert fetched.label == "Developer"
        assert fetched.attributes == {"company": "Acme", "dateRange": "2020 - 2024"}
        assert (fetched.position_x, fetched.position_y) == (400, 300)

    def test_profile_attributes(self, service):
        created = service.create(
            CreateProfileCommand(
                {"id": "me", "label": "Jane", "name": "Jane Doe", "title": "Engineer", "email": None}
            )
        )
        assert created.type == NodeType.PROFILE
        assert created.parent_id is None
        assert created.attributes == {"name": "Jane Doe", "title": "Engineer"}

    def test_no_payload_leaves_attributes_unset(self, service):
        service.create(CreateSkillCommand({"id": "java", "label": "Java"}))
        assert CvNode.objects.get(pk="java").attributes is None

    def test_links_existing_parent(self, cv_tree):
        created = cv_tree.create(
            CreateCategoryCommand(
                {"id": "education", "parentId": "profile", "label": "Education", "sectionId": "education"}
            )
        )
        assert created.parent_id == "profile"
        assert CvNode.objects.get(pk="education").parent_id == "profile"

    def test_unknown_parent_is_ignored(self, service):
        created = service.create(
            CreateSkillCommand({"id": "java", "parentId": "missing", "label": "Java"})
        )
        assert created.parent_id is None
        assert CvNode.objects.get(pk="java").parent is None

    def test_invalid_command_never_reaches_the_store(self, service):
        with pytest.raises(NodeValidationError) as excinfo:
            service.create(CreateProfileCommand({"id": "me", "label": "  ", "title": "Dev"}))
        assert set(excinfo.value.errors) == {"label", "name"}
        assert CvNode.objects.count() == 0

    def test_duplicate_id_is_rejected(self, cv_tree):
        with pytest.raises(NodeValidationError) as excinfo:
            cv_tree.create(CreateSkillCommand({"id": "python", "label": "Python 3"}))
        assert "id" in excinfo.value.errors
        assert CvNode.objects.get(pk="python").label == "Python"

    def test_duplicate_id_inserted_after_the_check_is_rejected(self, cv_tree, monkeypatch):
        monkeypatch.setattr(CvNodeQuerySet, "exists", lambda queryset: False)
        with pytest.raises(NodeValidationError) as excinfo:
            cv_tree.create(CreateSkillCommand({"id": "python", "label": "Python 3"}))
        assert "id" in excinfo.value.errors
        assert CvNode.objects.get(pk="python").label == "Python"

    def test_empty_payload_values_are_stored(self, service):
        created = service.create(
            CreateItemCommand({"id": "job", "label": "Job", "highlights": [], "company": ""})
        )
        assert created.attributes == {"highlights": [], "company": ""}
        assert CvNode.objects.get(pk="job").attributes == {"highlights": [], "company": ""}


class TestUpdate:
    def test_patches_only_given_fields(self, cv_tree):
        updated = update(cv_tree, id="acme", label="Senior Backend Developer", positionX=10)
        assert updated.label == "Senior Backend Developer"
        assert updated.description == "Services written with Java"
        assert updated.position_x == 10
        assert updated.position_y is None

    def test_attributes_are_merged(self, service):
        service.create(CreateItemCommand({"id": "job", "label": "Job", "company": "Acme"}))
        update(service, id="job", attributes={"isDraft": True})

        updated = update(service, id="job", attributes={"isDraft": False})

        assert updated.attributes == {"company": "Acme", "isDraft": False}
        assert CvNode.objects.get(pk="job").attributes == {"company": "Acme", "isDraft": False}

    def test_attributes_on_node_without_any(self, service):
        service.create(CreateSkillCommand({"id": "java", "label": "Java"}))
        updated = update(service, id="java", attributes={"proficiencyLevel": "advanced"})
        assert updated.attributes == {"proficiencyLevel": "advanced"}

    def test_unknown_node(self, service):
        with pytest.raises(NodeNotFound):
            update(service, id="ghost", label="Boo")

    def test_reparent(self, cv_tree):
        updated = update(cv_tree, id="python", parentId="experience")
        assert updated.parent_id == "experience"
        assert [node.id for node in cv_tree.get_children("backend")] == []

    def test_unknown_parent_keeps_current_parent(self, cv_tree):
        updated = update(cv_tree, id="python", parentId="missing")
        assert updated.parent_id == "backend"

    @pytest.mark.parametrize("new_parent", ["backend", "python"])
    def test_moving_below_itself_is_rejected(self, cv_tree, new_parent):
        with pytest.raises(NodeValidationError) as excinfo:
            update(cv_tree, id="backend", parentId=new_parent)
        assert "parentId" in excinfo.value.errors
        assert CvNode.objects.get(pk="backend").parent_id == "profile"

    def test_description_can_be_cleared(self, service):
        service.create(CreateItemCommand({"id": "job", "label": "Job", "description": "old"}))
        updated = update(service, id="job", description="")
        assert updated.description == ""
        assert CvNode.objects.get(pk="job").description == ""

    def test_null_description_is_left_alone(self, cv_tree):
        updated = update(cv_tree, id="acme", description=None)
        assert updated.description == "Services written with Java"

    def test_blank_label_is_rejected(self, cv_tree):
        with pytest.raises(NodeValidationError) as excinfo:
            update(cv_tree, id="acme", label="  ")
        assert "label" in excinfo.value.errors
        assert CvNode.objects.get(pk="acme").label == "Backend Developer"

    def test_missing_id_is_a_validation_error(self, service):
        with pytest.raises(NodeValidationError):
            service.update(UpdateNodeCommand({"label": "x"}))


class TestDelete:
    def test_cascades_to_descendants(self, cv_tree):
        assert cv_tree.delete("profile") is True
        for node_id in ("profile", "experience", "acme", "backend", "python"):
            with pytest.raises(NodeNotFound):
                cv_tree.get(node_id)
        assert CvNode.objects.count() == 0

    def test_only_removes_the_subtree(self, cv_tree):
        assert cv_tree.delete("backend") is True
        assert sorted(node.id for node in cv_tree.get_all()) == ["acme", "experience", "profile"]

    def test_leaf(self, cv_tree):
        assert cv_tree.delete("python") is True
        assert cv_tree.get_children("backend") == []

    def test_unknown_id(self, cv_tree):
        assert cv_tree.delete("ghost") is False
        assert CvNode.objects.count() == 5

    def test_failure_midway_keeps_the_whole_subtree(self, cv_tree, monkeypatch):
        original_delete = CvNode.delete

        def failing_delete(node, *args, **kwargs):
            if node.pk == "experience":
                raise RuntimeError("storage failure")
            return original_delete(node, *args, **kwargs)

        monkeypatch.setattr(CvNode, "delete", failing_delete)
        with pytest.raises(RuntimeError):
            cv_tree.delete("profile")
        assert CvNode.objects.count() == 5

    def test_child_added_during_delete_is_a_conflict(self, cv_tree, monkeypatch):
        original_delete = CvNode.delete

        def delete_after_new_child(node, *args, **kwargs):
            if node.pk == "experience":
                CvNode.objects.create(id="late", type=NodeType.ITEM, label="Late", parent_id="experience")
            return original_delete(node, *args, **kwargs)

        monkeypatch.setattr(CvNode, "delete", delete_after_new_child)
        with pytest.raises(NodeConflict):
            cv_tree.delete("profile")
        assert CvNode.objects.count() == 5
        assert not CvNode.objects.filter(pk="late").exists()


class TestQueries:
    def test_get_all(self, cv_tree):
        assert {node.id for node in cv_tree.get_all()} == {
            "profile",
            "experience",
            "acme",
            "backend",
            "python",
        }

    def test_get_unknown(self, service):
        with pytest.raises(NodeNotFound):
            service.get("ghost")

    def test_children(self, cv_tree):
        assert {node.id for node in cv_tree.get_children("profile")} == {"experience", "backend"}
        assert cv_tree.get_children("ghost") == []

    def test_search_is_case_insensitive_over_label_and_description(self, service):
        service.create(CreateSkillCommand({"id": "java", "label": "Java Programming"}))
        service.create(
            CreateSkillCommand({"id": "spring", "label": "Spring", "description": "Web apps with Java"})
        )
        service.create(CreateSkillCommand({"id": "react", "label": "React", "description": "Frontend"}))

        assert {node.id for node in service.search("java")} == {"java", "spring"}
        assert {node.id for node in service.search("FRONT")} == {"react"}
        assert service.search("cobol") == []


class TestMergeAttributes:
    def test_overlay_keeps_untouched_keys(self):
        assert merge_attributes({"a": 1, "b": 2}, {"b": 3, "c": 4}) == {"a": 1, "b": 3, "c": 4}

    def test_does_not_mutate_current(self):
        current = {"a": 1}
        merge_attributes(current, {"a": 2})
        assert current == {"a": 1}

    def test_empty_result_is_none(self):
        assert merge_attributes(None, {}) is None
