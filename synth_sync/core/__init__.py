"""
Core application engine for the sync pipeline.

The `SyncManager` composes one run: `CatalogFetcher` retrieves every catalog
page concurrently, `reconciler.diff` finds what the device lacks, and the
`SyncExecutor` downloads and pushes those beatmaps one at a time.
"""
