import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from kubernetes import client
from pydantic import BaseModel

from bootstrapctl.api.dependencies import get_api_client
from bootstrapctl.config import get_config
from bootstrapctl.context import ReconcileContext
from bootstrapctl.exceptions import ContextCancelled, PhaseError, StoreError
from bootstrapctl.models import PhaseIdentity
from bootstrapctl.reconciler import Reconciler

router = APIRouter()
logger = logging.getLogger("bootstrapctl.api.reconcile")


class ReconcileRequest(BaseModel):
    name: str
    namespace: str = "default"
    phases: Optional[List[PhaseIdentity]] = None


@router.post("/reconcile")
def reconcile_tenant(req: ReconcileRequest, api_client: client.ApiClient = Depends(get_api_client)):
    ctx = ReconcileContext(timeout=get_config().reconcile.timeout, logger=logger)
    try:
        report = Reconciler(api_client).reconcile(ctx, req.name, req.namespace, req.phases)
    except StoreError as e:
        raise HTTPException(status_code=404 if e.status == 404 else 502, detail=str(e))
    except PhaseError as e:
        raise HTTPException(status_code=500, detail=str(e))
    except ContextCancelled as e:
        raise HTTPException(status_code=504, detail=str(e))
    return report.to_dict()
