from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from ledgerdash.domain.models import FraudAssessment, FraudContext, Transaction
from ledgerdash.domain.ports import FraudPort

from .api_errors import RemoteSchemaError
from .http_client import HttpConfig, JsonSession

LOGGER = logging.getLogger(__name__)


class FraudRestAdapter(FraudPort):
    """REST adapter for the anomaly scorer's ``/predict`` endpoint."""

    def __init__(
        self,
        base_url: str,
        *,
        api_key: Optional[str] = None,
        request_timeout_s: float = 10,
    ) -> None:
        self.cfg = HttpConfig(request_timeout_s=request_timeout_s)
        self.session = JsonSession(base_url, api_key, self.cfg)

    def score(self, tx: Transaction, context: FraudContext) -> FraudAssessment:
        resp = self.session.post("/predict", json_body=self.build_payload(tx, context))
        self.session.ensure_ok(resp, "predict")
        payload: Any = self.session.json_any(resp, "predict")
        try:
            assessment = FraudAssessment.from_payload(payload)
        except ValueError as exc:
            LOGGER.warning("Rejected malformed predict response: %s", exc)
            raise RemoteSchemaError(
                str(exc), status=resp.status_code, payload=payload, endpoint="predict"
            ) from exc
        LOGGER.debug("predict anomaly=%s error=%.4f", assessment.anomaly, assessment.error)
        return assessment

    @staticmethod
    def build_payload(tx: Transaction, context: FraudContext) -> Dict[str, Any]:
        return {
            "transaction_value": tx.value,
            "frequency": context.frequency,
            "latitude": context.latitude,
            "longitude": context.longitude,
            "location_deviation": context.location_deviation,
        }


__all__ = ["FraudRestAdapter"]
