"""Link graph: pages, links, path resolution and validation."""
