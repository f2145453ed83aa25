"""Well known paths and values shared by bootstrap actions."""

# kubeadm config written to every node by the config action
KUBEADM_CONFIG_PATH = "/kind/kubeadm.conf"

# manifests a node image may ship for the CNI and storage actions
DEFAULT_CNI_MANIFEST_PATH = "/kind/manifests/default-cni.yaml"
DEFAULT_STORAGE_MANIFEST_PATH = "/kind/manifests/default-storage.yaml"

ADMIN_KUBECONFIG_PATH = "/etc/kubernetes/admin.conf"

# fixed bootstrap token, the cluster is local and short lived
KUBEADM_TOKEN = "abcdef.0123456789abcdef"

CONTROL_PLANE_LABEL = "node-role.kubernetes.io/control-plane"

# certificates secondary control planes need before kubeadm join
SHARED_CERTIFICATES = (
    "/etc/kubernetes/pki/ca.crt",
    "/etc/kubernetes/pki/ca.key",
    "/etc/kubernetes/pki/sa.key",
    "/etc/kubernetes/pki/sa.pub",
    "/etc/kubernetes/pki/front-proxy-ca.crt",
    "/etc/kubernetes/pki/front-proxy-ca.key",
    "/etc/kubernetes/pki/etcd/ca.crt",
    "/etc/kubernetes/pki/etcd/ca.key",
)
