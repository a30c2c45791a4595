"""
Views for the points app.

Members can read their own balance and history.  Points only move through
the ledger store, so there is no write endpoint here: credits come from the
billing collaborator, debits from event redemption, adjustments from the
back-office.
"""
from rest_framework import permissions
from rest_framework.response import Response
from rest_framework.views import APIView

from .ledger import LedgerStore
from .serializers import AccountBalanceSerializer, LedgerEntrySerializer


class BalanceView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        account = LedgerStore().get_account(request.user.pk)
        return Response(AccountBalanceSerializer(account).data)


class HistoryView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        try:
            limit = int(request.query_params.get("limit", 0)) or None
        except (TypeError, ValueError):
            limit = None
        if limit is not None:
            limit = max(1, min(limit, 200))
        entries = LedgerStore().history(request.user.pk, limit=limit)
        return Response({"entries": LedgerEntrySerializer(entries, many=True).data})
