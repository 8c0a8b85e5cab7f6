from prfeedback_core.report.human import STYLES, render_human
from prfeedback_core.report.structured import dumps_structured, render_structured

__all__ = ["STYLES", "dumps_structured", "render_human", "render_structured"]
