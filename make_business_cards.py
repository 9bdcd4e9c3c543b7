#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Render business cards onto Avery 8371 sheets.
"""

# local repo modules
import business_card_sheets.cli


if __name__ == "__main__":
	business_card_sheets.cli.main()
