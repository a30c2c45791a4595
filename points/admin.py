"""
Django admin registration for the points app.

Balances and history are read-only here: every change must go through the
ledger store so the history stays complete.
"""
from django.contrib import admin

from .models import AccountBalance, LedgerEntry


class ReadOnlyAdmin(admin.ModelAdmin):
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(AccountBalance)
class AccountBalanceAdmin(ReadOnlyAdmin):
    list_display = ("user", "balance", "total_earned", "total_spent", "last_updated")
    search_fields = ("user__email",)
    ordering = ("-last_updated",)


@admin.register(LedgerEntry)
class LedgerEntryAdmin(ReadOnlyAdmin):
    list_display = ("user", "kind", "amount", "balance_after", "reference_id", "created_at")
    list_filter = ("kind",)
    search_fields = ("user__email", "reference_id", "description")
    ordering = ("-created_at",)
