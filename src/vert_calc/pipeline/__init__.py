"""Video analysis pipeline orchestration."""

from vert_calc.pipeline.analyzer import AnalysisResult, JumpAnalyzer

__all__ = ["AnalysisResult", "JumpAnalyzer"]
