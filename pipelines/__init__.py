"""
Pipeline entry points for roles-radar.

The `roles-radar` CLI drives one run end to end:
1. Load - config (migrated), profile, registry, runtime overlay
2. Plan - resolve sources into fetch tasks
3. Fetch - run adapters under a wall-clock budget
4. Score - gate and rank postings per bucket
5. Reconcile - merge with the prior output and age postings
6. Discover - probe observed companies and grow the registry
7. Write - persist the output document and the registry
"""
