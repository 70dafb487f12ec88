"""Host staging of particle containers.

Diagnostics never read device memory directly: they work on a host copy of
the whole container that is created for one output call and dropped after it.
"""

from __future__ import annotations

import logging

from beamdiag.core.particles import ParticleContainer
from beamdiag.errors import StagingError
from beamdiag.gpu.utils import synchronize

logger = logging.getLogger(__name__)


def stage_to_host(container: ParticleContainer) -> ParticleContainer:
    """Copy every level and tile of a container into host memory.

    The copy has value semantics: later changes to the source (on host or
    device) are not visible through it. Particles stay in their level and
    tile; nothing is exchanged between ranks.

    Args:
        container: Source container (read only)

    Returns:
        New host-resident ParticleContainer

    Raises:
        StagingError: If the copy's level/tile layout differs from the source
    """
    synchronize()

    host = container.make_alike()
    host.copy_particles(container)

    source_layout = container.layout()
    host_layout = host.layout()
    if host_layout != source_layout:
        raise StagingError(
            f"host copy layout {host_layout} does not match source layout {source_layout}"
        )

    logger.debug(
        "Staged %d particles in %d level(s) to host (rank %d)",
        host.total_number_of_particles(),
        host.num_levels,
        host.rank,
    )
    return host
