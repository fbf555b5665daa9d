"""Contains the logger of dualexpr modules.

``dualexpr`` logs through the
`Logging <https://docs.python.org/3/library/logging.html>`__ standard library and
never installs handlers itself. Messages are grouped in two levels:

* ``DEBUG``: One record per materialization pass (tree size, dimension,
  memoization).
* ``WARNING``: A materialized result contains NaN or infinite entries.

Calling applications configure the output by
`Configuring Logging <https://docs.python.org/3/howto/logging.html#configuring-logging>`__
for ``dualexpr.logger.dualexpr_logger``, e.g.::

    >>> import logging
    >>> logging.getLogger("dualexpr").setLevel(logging.DEBUG)
"""

import logging

logger_name = "dualexpr"
dualexpr_logger = logging.getLogger(logger_name)
