#!/usr/bin/env python3
import sys

from kindctl.apis import encoding, validate_cluster
from kindctl.apis.cluster import CONTROL_PLANE_ROLE
from kindctl.errors import ConfigError


def fail(msg):
    print(f"❌ {msg}")
    sys.exit(1)


if len(sys.argv) != 2:
    fail("Usage: validate-cluster.py <path/to/cluster.yaml>")

try:
    cluster = encoding.load(sys.argv[1])
    validate_cluster(cluster)
except ConfigError as e:
    fail(str(e))

# etcd needs an odd number of members to tolerate a failure
control_planes = sum(1 for n in cluster.nodes if n.role == CONTROL_PLANE_ROLE)
if control_planes > 1 and control_planes % 2 == 0:
    print(f"⚠️  {control_planes} control-plane nodes: an even etcd member count adds no fault tolerance over {control_planes - 1}.")

print(f"✅ {sys.argv[1]} validation passed ({len(cluster.nodes)} nodes).")
