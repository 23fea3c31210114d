# -*- coding: utf-8 -*-
"""
External collaborators: the camera (`camera`) and the currency-rate service
(`conversion_gateway`).
"""
