from django.db import models
from django.db.models import Q


class NodeType(models.TextChoices):
    """Kinds of node that make up a CV tree."""

    PROFILE = "PROFILE", "Profile"
    CATEGORY = "CATEGORY", "Category"
    ITEM = "ITEM", "Item"
    SKILL_GROUP = "SKILL_GROUP", "Skill group"
    SKILL = "SKILL", "Skill"


class CvNodeQuerySet(models.QuerySet):
    """Lookups used by the hierarchy service and the read endpoints."""

    def by_parent(self, parent_id: str) -> "CvNodeQuerySet":
        return self.filter(parent_id=parent_id)

    def roots(self) -> "CvNodeQuerySet":
        return self.filter(parent__isnull=True)

    def of_type(self, node_type: str) -> "CvNodeQuerySet":
        return self.filter(type=node_type)

    def search(self, query: str) -> "CvNodeQuerySet":
        """Case-insensitive substring match on label or description."""
        return self.filter(Q(label__icontains=query) | Q(description__icontains=query))


class CvNode(models.Model):
    """A single entry of the CV tree.

    Type-specific data (company, highlights, proficiency level, draft
    flags...) lives in the open ``attributes`` JSON object rather than in
    dedicated columns.  The parent relation is protected: a node can only
    be removed once it has no children left, which is what the cascading
    delete in ``services.HierarchyService`` relies on.
    """

    id = models.CharField(primary_key=True, max_length=50)
    type = models.CharField(max_length=20, choices=NodeType.choices, editable=False)
    parent = models.ForeignKey(
        "self",
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name="children",
    )
    label = models.CharField(max_length=255)
    description = models.TextField(null=True, blank=True)
    attributes = models.JSONField(null=True, blank=True)
    position_x = models.IntegerField(null=True, blank=True)
    position_y = models.IntegerField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = CvNodeQuerySet.as_manager()

    class Meta:
        db_table = "cv_node"
        ordering = ["created_at"]

    def __str__(self) -> str:
        return f"{self.type}:{self.id}"

    def is_ancestor_of(self, node: "CvNode") -> bool:
        """Return True if this node appears on ``node``'s parent chain, or is ``node`` itself."""
        current = node
        while current is not None:
            if current.pk == self.pk:
                return True
            current = current.parent
        return False
