# -*- coding: utf-8 -*-
"""HaruFit food dataset backend."""
