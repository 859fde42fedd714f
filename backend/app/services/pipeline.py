import logging
import random

from app.cache.redis import cache_get, cache_set
from app.config import Settings, settings
from app.errors import EmptyInput
from app.models.address import ResolvedAddress
from app.models.estimate import EstimateResult
from app.services import geocoder
from app.services.estimator import ESTIMATION_POLICIES, EstimationPolicy
from app.services.usage import USAGE_POLICIES, UsagePolicy

logger = logging.getLogger(__name__)


class EstimationPipeline:
    """resolve -> estimate -> fetch usage, one submission at a time.

    Resolver errors propagate; the usage policy absorbs its own failures.
    """

    def __init__(
        self,
        estimation_policy: EstimationPolicy,
        usage_policy: UsagePolicy,
        rng: random.Random | None = None,
    ):
        self.estimation_policy = estimation_policy
        self.usage_policy = usage_policy
        self.rng = rng or random.Random()

    async def _resolve(self, query: str) -> ResolvedAddress:
        cache_key = f"geocode:{geocoder.normalize_query(query).casefold()}"
        cached = await cache_get(cache_key)
        if cached is not None:
            logger.info("geocode cache_hit key=%s", cache_key)
            return ResolvedAddress(**cached)

        resolved = await geocoder.resolve(query)
        await cache_set(cache_key, resolved.model_dump(), ttl=settings.cache_ttl_geocode)
        return resolved

    async def run(self, query: str) -> EstimateResult:
        query = (query or "").strip()
        if not query:
            raise EmptyInput()

        address = await self._resolve(query)
        house = self.estimation_policy.estimate(address, self.rng)
        usage = await self.usage_policy.compute_usage(address, self.rng)

        logger.info(
            "estimate done city=%s size=%s windows=%s monthly=%s fallback=%s",
            address.city,
            house.size,
            house.windows,
            usage.monthly,
            usage.fallback,
        )
        return EstimateResult(address=address, house=house, usage=usage)


def build_pipeline(config: Settings = settings, rng: random.Random | None = None) -> EstimationPipeline:
    estimation_policy = ESTIMATION_POLICIES[config.estimation_policy]()
    usage_policy = USAGE_POLICIES[config.usage_policy](
        fallback_monthly=config.fallback_monthly_kwh
    )
    return EstimationPipeline(estimation_policy, usage_policy, rng=rng)
