from django.db import models


class Counter(models.Model):
    """
    A named monotonic integer.

    Rows are created implicitly by the first allocation for a name and
    only ever advanced through ``apps.sequences.services.allocate_next``.
    """

    name = models.CharField(max_length=64, unique=True)
    value = models.PositiveBigIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'sequence_counters'
        ordering = ['name']

    def __str__(self):
        return f"{self.name}={self.value}"
