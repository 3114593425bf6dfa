"""
Retirement Engine Tests

Test Groups:
- Phase 1: Zombie score tiers, weights and guards
- Phase 2: Similarity, greedy clustering, canonical selection
- Phase 3: Decision cascade, one rule at a time
- Phase 4: Simulation aggregates and risk levels
- HTML content extraction
- Reports and end-to-end pipeline
"""
