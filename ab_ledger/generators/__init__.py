"""Demo data generators."""

from ab_ledger.generators.base import BaseGenerator
from ab_ledger.generators.ledger import CustomerGenerator, LabourGenerator

__all__ = ["BaseGenerator", "CustomerGenerator", "LabourGenerator"]
