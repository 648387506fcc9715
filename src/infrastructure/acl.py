from typing import Any, Optional
from src.domain.models import StarMetric

class GitHubTranslator:
    """
    Anti-corruption layer that translates raw GitHub REST repository payloads into StarMetric instances.
    """

    @staticmethod
    def to_star_metric(repository: str, raw_repo: Optional[Any]) -> StarMetric:
        """
        Transforms a raw GitHub repository payload into a StarMetric.

        Args:
            repository (str): The "owner/name" the payload was requested for.
            raw_repo (Optional[Any]): The decoded JSON body, or None when GitHub had no answer.

        Returns:
            StarMetric: The metric; its count is None when the payload carries no usable value.
        """
        if not isinstance(raw_repo, dict):
            return StarMetric.unknown(repository)

        stars = raw_repo.get('stargazers_count')
        # bool is an int subclass; reject it along with negatives and strings
        if not isinstance(stars, int) or isinstance(stars, bool) or stars < 0:
            return StarMetric.unknown(repository)

        return StarMetric(repository=repository, count=stars)
