"""
Interactive surfaces for human participation in missions.
"""

from missionguard.interactive.console import ConsoleFeedbackResponder, deliver_feedback

__all__ = ["ConsoleFeedbackResponder", "deliver_feedback"]
