from rounds.provider import RoundProvider, ClockRoundProvider
from rounds.audit import SubmissionAuditor
from rounds.task import RoundTask, build_task, build_content_store
