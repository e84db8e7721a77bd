"""Built-in commands for the jyotish CLI.

Readings (``horoscope``, ``kundali``, ``match``, ``numerology``, ``palm``,
``coords``, ``sync``) are plain commands registered on the root app by
:func:`jyotish.app.main`; ``ask``, ``sign``, ``cache`` and ``config`` are
sub-command groups.
"""
