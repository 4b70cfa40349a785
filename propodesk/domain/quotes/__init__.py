"""Marketing calculator - price catalog and quote engine"""
