from statement_ledger.inference.analyzer import StatementAnalyzer
from statement_ledger.inference.client_base import BaseInferenceClient
from statement_ledger.inference.factory import AnalyzerFactory

__all__ = ["AnalyzerFactory", "BaseInferenceClient", "StatementAnalyzer"]
