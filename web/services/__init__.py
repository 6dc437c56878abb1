"""Service layer for the teacher evaluation system."""
from .scoring import ScoreSummary, summarize
from .evidence import DecodedImage, FittedImage, decode_data_url, fit_dimensions
from .composer import EvaluationComposer
from .docx_report import EvaluationDocumentGenerator, GeneratedDocument
from .repository import InMemoryEvaluationStore

__all__ = [
	"ScoreSummary", "summarize",
	"DecodedImage", "FittedImage", "decode_data_url", "fit_dimensions",
	"EvaluationComposer",
	"EvaluationDocumentGenerator", "GeneratedDocument",
	"InMemoryEvaluationStore"
]
