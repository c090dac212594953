from fastapi import APIRouter, Depends, HTTPException
from kubernetes import client

from bootstrapctl.api.dependencies import get_api_client
from bootstrapctl.commands.status import phase_status
from bootstrapctl.context import background
from bootstrapctl.exceptions import StoreError
from bootstrapctl.store import TenantControlPlaneStore

router = APIRouter()


@router.get("/status/{namespace}/{name}")
def tenant_status(namespace: str, name: str, api_client: client.ApiClient = Depends(get_api_client)):
    try:
        tcp = TenantControlPlaneStore.from_config(api_client).get(background(), name, namespace)
    except StoreError as e:
        raise HTTPException(status_code=404 if e.status == 404 else 502, detail=str(e))
    return {"name": name, "namespace": namespace, "phases": phase_status(tcp)}
