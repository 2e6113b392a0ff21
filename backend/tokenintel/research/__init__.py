from .session import ResearchSession
from .sinks import ListProgressSink, QueueProgressSink
from .workflow import PlannedStep, ResearchPlan, ResearchWorkflow
from .token_research import ResearchServices, build_token_research_plan

__all__ = [
    'ResearchSession',
    'ListProgressSink',
    'QueueProgressSink',
    'PlannedStep',
    'ResearchPlan',
    'ResearchWorkflow',
    'ResearchServices',
    'build_token_research_plan',
]
