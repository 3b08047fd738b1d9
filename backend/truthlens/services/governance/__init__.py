# Governance Services
#
# The local half of an audit. Everything here is pure and synchronous:
# - Basic statistics shared by the analyzers (statistics)
# - Missing values and z-score outliers (DataQualityAnalyzer)
# - Mean shift between dataset halves (DriftAnalyzer)
# - Weighted score plus the veto gate that yields the badge (GovernanceAggregator)
