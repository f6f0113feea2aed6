# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
CloudFormation Custom Resource Lambda Package

This package provides a CloudFormation custom resource provider for ECS
clusters, Lambda log metric filters and SQS queue permissions.
"""
