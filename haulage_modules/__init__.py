"""
Module: haulage_modules
Responsibility:
    Back-office glue around the pure reconciliation engines: the
    conciliation workflow (assembly, persistence, orchestration) and the
    document exporters.

Architecture position:
    Modules -- may import haulage_kernel, haulage_engines and haulage_config.
    Nothing below this layer imports from here.
"""
