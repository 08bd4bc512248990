"""
Quota ledger: one row per local day, locked during admission.

Committed quantity is always summed from Order rows; the ledger row only
serializes admission decisions and keeps per-day counters for operators.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _


class QuotaLedger(models.Model):
    """
    Admission lock and counters for one local calendar day.

    Usage (internal to PreorderAdmission.submit):
        with transaction.atomic():
            ledger = QuotaLedger.lock(today)
            ...check committed quantity, create order...
            ledger.record(admitted=True)
    """

    day = models.DateField(
        unique=True,
        verbose_name=_("Day"),
    )
    admitted = models.PositiveIntegerField(
        default=0,
        verbose_name=_("Admitted"),
        help_text=_("Submissions accepted on this day"),
    )
    rejected = models.PositiveIntegerField(
        default=0,
        verbose_name=_("Rejected"),
        help_text=_("Submissions refused because the day was full"),
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        verbose_name=_("Updated at"),
    )

    class Meta:
        db_table = "preorder_quota_ledger"
        verbose_name = _("Quota ledger")
        verbose_name_plural = _("Quota ledgers")
        ordering = ["-day"]

    def __str__(self) -> str:
        return f"{self.day} → +{self.admitted} / -{self.rejected}"

    @classmethod
    def lock(cls, day) -> "QuotaLedger":
        """
        Lock the ledger row for `day`, creating it if needed.

        Must run inside transaction.atomic(). SELECT FOR UPDATE holds the
        row on databases with row locks; the write that follows takes the
        database write lock on SQLite before any quota read happens.
        """
        ledger, created = cls.objects.select_for_update().get_or_create(day=day)
        if not created:
            ledger.save(update_fields=["updated_at"])
        return ledger

    def record(self, admitted: bool) -> None:
        """Count one admission decision."""
        if admitted:
            self.admitted += 1
            self.save(update_fields=["admitted", "updated_at"])
        else:
            self.rejected += 1
            self.save(update_fields=["rejected", "updated_at"])
