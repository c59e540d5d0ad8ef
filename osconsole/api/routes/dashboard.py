from fastapi import APIRouter

from ..deps import ActorDep, BackendDep, RegistryDep
from osconsole.schemas.dashboard import DashboardOut
from osconsole.services.reports import dashboard_report

router = APIRouter()


@router.get("", response_model=DashboardOut)
def get_dashboard(client: BackendDep, registry: RegistryDep, current: ActorDep):
    return dashboard_report(client, registry, current)
