"""
Niche Bundler: product bundles with a discount for Shopify stores.
"""
