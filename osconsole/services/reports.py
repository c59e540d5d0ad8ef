"""
Reports service (дашборд)

Повертає агреговані зрізи по OS. Без збереження snapshot: кожне
завантаження дашборду тягне всі ордери й перераховує.
"""

from osconsole.clients.backend import BackendClient
from osconsole.core.config import settings
from osconsole.schemas.dashboard import DashboardOut
from osconsole.workflow.dashboard import ranked, status_stats, summarize
from osconsole.workflow.errors import PermissionDenied
from osconsole.workflow.permissions import Action, Actor, Resource
from osconsole.workflow.registry import StatusRegistry


def dashboard_report(client: BackendClient, registry: StatusRegistry, actor: Actor) -> DashboardOut:
    """
    Формуємо дашборд:
      - скільки OS активні (не у фінальному статусі)
      - розподіл активних за статусом
      - хто скільки створив / закрив
    """
    if not actor.can(Resource.dashboard, Action.read):
        raise PermissionDenied("Not allowed to read the dashboard")

    summary = summarize(client.list_orders(), registry, settings.unassigned_label)
    return DashboardOut(
        summary=summary,
        statuses=status_stats(summary, registry),
        analysts_created=ranked(summary.per_analyst_created_count),
        analysts_finalized=ranked(summary.per_analyst_finalized_count),
    )
