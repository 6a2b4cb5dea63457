# -*- coding: utf-8 -*-
"""Food datasets: part/chunk delivery, in-memory record cache and ranked search.

Large nutrition datasets are exported offline, split into gzip parts and kept in
object storage (or a local directory). This package locates those parts, streams
them to clients, and materializes them once per language for server-side search.
"""
