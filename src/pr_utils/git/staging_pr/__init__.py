"""Build staging pull requests by cherry-picking feature branches onto a staging branch."""

from pr_utils.git.staging_pr.builder import StagingChangesetBuilder, StagingPROptions
from pr_utils.git.staging_pr.collector import CommitCollector
from pr_utils.git.staging_pr.errors import (
	AllBranchesFailedError,
	BranchNotFoundError,
	CherryPickConflictError,
	ConfigurationError,
	CredentialMissingWarning,
	DirtyWorkingTreeError,
	EmptyChangesetError,
	PullRequestCreationError,
	RemoteUrlUnparseableWarning,
	StagingPRError,
)
from pr_utils.git.staging_pr.events import Stage, StageEvent, StageEventKind
from pr_utils.git.staging_pr.publisher import ChangesetPublisher
from pr_utils.git.staging_pr.resolver import BranchPattern, BranchResolver
from pr_utils.git.staging_pr.schemas import (
	BranchOrigin,
	BranchSpec,
	Changeset,
	CommitRecord,
	PublishResult,
	PullRequest,
	StagingRunResult,
)

__all__ = [
	"AllBranchesFailedError",
	"BranchNotFoundError",
	"BranchOrigin",
	"BranchPattern",
	"BranchResolver",
	"BranchSpec",
	"Changeset",
	"ChangesetPublisher",
	"CherryPickConflictError",
	"CommitCollector",
	"CommitRecord",
	"ConfigurationError",
	"CredentialMissingWarning",
	"DirtyWorkingTreeError",
	"EmptyChangesetError",
	"PublishResult",
	"PullRequest",
	"PullRequestCreationError",
	"RemoteUrlUnparseableWarning",
	"Stage",
	"StageEvent",
	"StageEventKind",
	"StagingChangesetBuilder",
	"StagingPRError",
	"StagingPROptions",
	"StagingRunResult",
]
